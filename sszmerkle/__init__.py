"""SSZ encoding helpers, Merkle hashing, Merkle proof verification and test-data fuzzing."""

__version__ = "0.1.0"
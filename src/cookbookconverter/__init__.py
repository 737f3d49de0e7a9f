"""Convert a Firestore recipe export into Crouton recipe bundles."""

__version__ = "0.1.0"

"""Command line interface for Korean transit search."""

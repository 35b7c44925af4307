"""Command line front end for the pixel-art pipeline."""

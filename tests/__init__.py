"""Unit test package for espa_convert."""

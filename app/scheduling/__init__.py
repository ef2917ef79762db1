"""Availability resolution, slot conflicts and appointment time windows."""

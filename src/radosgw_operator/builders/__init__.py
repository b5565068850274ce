"""Builders turning CRD specs into runtime objects."""

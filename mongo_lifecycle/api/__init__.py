"""HTTP front end for the backup engine."""

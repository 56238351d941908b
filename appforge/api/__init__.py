"""HTTP route layer around the pipeline."""

"""HTTP service for the flowchart converter."""

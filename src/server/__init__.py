"""HTTP service exposing the mailforge pipeline."""

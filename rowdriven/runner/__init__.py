"""Assignment resolution, execution and result write-back."""

"""Core building blocks: errors, retry configuration, logging, execution."""

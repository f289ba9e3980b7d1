"""Import pipeline services: mapping, transform, validation, execution."""

"""Bazel Quarkus augmentor package."""

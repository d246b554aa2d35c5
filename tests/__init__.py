"""Test suite for the Polyglot Chat relay."""

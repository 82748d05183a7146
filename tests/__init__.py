"""Tests - Test suite for the rollup batch circuit, run via pytest."""

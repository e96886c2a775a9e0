"""Molecules & Light support package: molecule catalogue, model driver, config and viewer."""

"""Charity payment gateway layer."""

"""Operational command-line scripts for the expense tracker."""

"""Timeharbor package.

This package is organized by feature modules (users, teams, tickets, timelog, ...)
with a thin Flask controller layer on top of service/repository layers.
"""

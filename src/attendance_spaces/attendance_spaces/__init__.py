"""Attendance Spaces package.

Organized by feature modules (users, spaces, submissions, communities,
notifications) with a thin Flask
controller layer over service/repository layers.
"""

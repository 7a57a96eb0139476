"""
Canvas Grades

Server-side proxy that builds a student's grade report from the Canvas API.
"""

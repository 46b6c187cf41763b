"""Academic roles package.

Temporal role assignments for an academic administration system: who heads a
department, who coordinates a program and where a staff member is employed,
with the full history of each. Organized by feature modules (assignments,
employments, directory) with thin Flask controllers over service/repository
layers.
"""

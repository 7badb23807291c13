"""
C Batch Grader: Automated evaluation of C homework submissions

A sequential grading pipeline that locates, compiles, runs and compares
each student's program against a reference output, writing one graded
record per submission.
"""

__version__ = "0.1.0"

"""
SeminarDB: in-memory seminar catalog with ID, cost, date, keyword and
location indexes.
"""

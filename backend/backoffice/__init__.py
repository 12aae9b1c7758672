"""
Hotel back-office service
"""

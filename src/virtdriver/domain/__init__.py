"""Domain Model"""

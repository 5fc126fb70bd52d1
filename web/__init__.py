"""HTTP surface for the spreadsheet editor"""

"""
Bibliographic metadata extraction and fusion for scientific PDFs.
"""

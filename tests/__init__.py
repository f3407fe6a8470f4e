"""
Component tests for the e-commerce backend

Routes, token auth and the persistence helpers run for real against an
in-memory MongoDB (mongomock); only the Cloudinary upload call is faked.
"""

"""API request/response models"""

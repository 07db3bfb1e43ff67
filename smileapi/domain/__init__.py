"""
Domain layer: landmark scoring engine
"""

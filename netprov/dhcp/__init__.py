"""
DHCP address-lease engine
"""

"""
netprov - provisioning responder for a dedicated network segment

Hands out addresses over DHCP, answers every DNS query with the service
address and serves a fixed configuration document over HTTP.
"""

__version__ = "0.1.0"
__author__ = "netprov developers"

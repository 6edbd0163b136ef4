"""Shared test fixtures for the RequestKit suite.

- http_mocking: echo server routes served through an HTTPX mock transport
"""

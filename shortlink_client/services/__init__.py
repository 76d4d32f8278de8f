"""
Services module for request orchestration.

This module contains the classes that talk to the remote shortening
service and keep the session's results: the shortening executor, the
result store, the statistics aggregator and the batch controller that
ties them together.
"""

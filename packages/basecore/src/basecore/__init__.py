"""
Basecore - shared infrastructure

Settings, logging setup and database session helpers used by every
package in the repository. Nothing in here knows about event actions.
"""

"""
DevConnector Backend - Services Layer
======================================

What:  Business logic between the HTTP routes and the database.
How:   Each service is a stateless class exposed as a module-level singleton.
       Methods receive the request's AsyncSession and return response
       schemas, raising DevConnectorError subclasses on failure.

Service Inventory:
    - ProfileService: profile upsert, reads, account delete, experience and
      education entries
    - PostService: posts, likes, comments
    - GitHubService: repository lookup against the GitHub REST API
"""

"""
DevConnector Backend - API Routes Package
==========================================

Route Inventory:
    - profile.py: /api/profile    (profiles, experience, education, GitHub)
    - posts.py:   /api/posts      (feed, likes, comments)
    - health.py:  /health         (service health check)

Routes stay thin: read the request, call a service, return its result.
"""

"""
Retro Planner: diary, budget, calendar and to-do backend.

The FastAPI application lives in ``planner.main``; the ``planner.client``
package holds the dashboard-side state, API cache and view helpers.
"""

__version__ = "0.1.0"

"""Application services for the libroll CLI.

Services implement the business logic, coordinating between the core types
(core/) and infrastructure (git/, platform/).
"""

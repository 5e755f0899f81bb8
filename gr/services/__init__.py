"""Application services for the goravel release CLI.

Services implement the release logic, coordinating between the core layer
(core/) and infrastructure (platform/, git/).
"""

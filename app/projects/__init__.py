"""
Projects app.

Crowdfunded projects, the organizations that own them, and the monthly
donation goals tracked against subscription totals.

Usage:
    from projects.services import DonationGoalsService, ProjectService

    ProjectService.update_project_totals(project)
    DonationGoalsService.update_project_goals(project)
"""

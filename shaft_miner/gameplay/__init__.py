"""
Gameplay core: world grid, inventory, machines, automation.
NO UI DEPENDENCIES.
"""

"""
Drayage engine services: rate schedule, charge calculator, order state
machine, appointment scheduling and the lifecycle coordinator.
"""

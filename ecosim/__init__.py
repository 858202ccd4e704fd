"""
Ecosim Ecosystem Simulation

A headless predator/prey simulator: plants, herbivores, carnivores and
omnivores move, eat, reproduce and die inside a bounded 2D field.

Architecture: EcosystemSimulation is the source of truth. Renderers and UIs are consumers.
"""

__version__ = "0.1.0"

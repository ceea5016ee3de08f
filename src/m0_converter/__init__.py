"""
M0 converter.

Migrates the M0 interim metadata graph to the target model: SKOS concepts
for families, series, operations and indicators, ORG organizations, PROV
production links and SIMS metadata reports.
"""

__version__ = "0.1.0"

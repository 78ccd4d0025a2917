"""
inner_loop_buddy: open a browser on your dev server when its task starts.

Subpackages:
- core: scopes, criteria matching, configuration aggregation, ports
- settings: layered JSON settings store
- tasks: task models, local task host, task monitor
- launch: availability probe, browser surface, launch controller
- cli / connectors: composition root, slash commands, console
"""

__version__ = "1.2.0"

"""
Line transformer plugins.

- base: Plugin capability, FunctionPlugin adapter, PluginChain, Exclude, Strip
- coloring: Coloring (ANSI level colors, rich themes)
"""
from .base import Plugin, FunctionPlugin, PluginChain, Exclude, Strip, as_plugin
from .coloring import Coloring, THEMES

__all__ = [
    'Plugin',
    'FunctionPlugin',
    'PluginChain',
    'Exclude',
    'Strip',
    'as_plugin',
    'Coloring',
    'THEMES',
]

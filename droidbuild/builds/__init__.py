"""Build orchestration module.

This module handles:
- Artifact discovery in build output directories
- Running the external build tools
- The ant, gradle and no-op backends
- Staging artifacts in the project's out/ directory
"""

# Access submodules directly: droidbuild.builds.service, etc.

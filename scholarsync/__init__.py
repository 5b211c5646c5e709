"""ScholarSync school management core.

Keep package import lightweight; import heavy submodules explicitly where needed.
"""

__version__ = "1.0.0"
__all__ = [
	"client",
	"config",
	"coordinator",
	"exceptions",
	"filters",
	"forms",
	"metrics",
	"models",
	"notifications",
	"services",
]

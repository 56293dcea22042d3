from . import camera, clients, home, item_editor, items, onboarding, theme

__all__ = [
	"home",
	"items",
	"item_editor",
	"clients",
	"camera",
	"onboarding",
	"theme",
]

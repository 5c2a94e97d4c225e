"""Stereoscopic 360 degree panorama capture by sweeping a virtual camera rig."""

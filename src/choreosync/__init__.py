"""choreosync — temporal resolution engine for group choreography.

Resolve which motion-capture layer is in effect for each performer and
where each performer stands on stage at any point of a shared timeline.
Projects are declared in YAML manifests and driven by a playback clock.
"""

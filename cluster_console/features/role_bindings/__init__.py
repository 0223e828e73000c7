"""
Role binding feature module.

Bindings assign tenant roles to users; mutations of the bindings are guarded
by the authorization evaluator.
"""

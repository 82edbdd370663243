"""
Transport adapters.

Everything that knows the shape of Discord events lives here: building the
origin context, binding arguments, and the reply sinks that hide whether a
command came from a slash command or a prefixed message.
"""

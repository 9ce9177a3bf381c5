"""Domain services: prompts, model gateway, response recovery, lessons and session state."""

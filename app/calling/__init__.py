"""Call orchestration: script cache, phone numbers and provider selection."""

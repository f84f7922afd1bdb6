#!/usr/bin/env python3
"""Check a running Interview Caller instance: health, config and assistant."""

import json
import sys

import requests


def main():
    base_url = sys.argv[1] if len(sys.argv) > 1 else "http://localhost:3000"

    print(f"Checking: {base_url}")
    print("-" * 50)

    response = requests.get(f"{base_url}/health", timeout=10)
    response.raise_for_status()
    services = response.json()["services"]

    for name in ("supabase", "vapi", "twilio"):
        configured = services[name]["configured"]
        print(f"[{'OK' if configured else '--'}] {name}")
    print(f"[{'OK' if services['webhookAuth'] else '--'}] webhook auth")

    response = requests.get(f"{base_url}/api/config", timeout=10)
    response.raise_for_status()
    body = response.json()
    config = body["config"]

    print(f"\n[CONFIG] source={body['source']} method={config['method']}")
    print(f"[CONFIG] voice={json.dumps(config['voiceSettings'])}")
    print(f"[CONFIG] calls={json.dumps(config['callSettings'])}")

    response = requests.get(f"{base_url}/api/assistant", timeout=10)
    response.raise_for_status()
    assistant = response.json()
    print(f"\n[ASSISTANT] {assistant['name']} ({assistant['language']}) model={assistant['model']['model']}")


if __name__ == "__main__":
    main()

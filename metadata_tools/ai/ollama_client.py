#!/usr/bin/env python3
"""
Ollama client returning JSON objects from a local LLM.

The model is asked for strict JSON; the reply is cleaned of markdown fences
and the object between the first "{" and the last "}" is parsed.
"""

import json
import logging
import re
import time
from typing import Dict, Optional

import requests


class OllamaClient:
    """Client for a local Ollama server."""

    DEFAULT_MODEL = "llama3.1:8b"

    def __init__(self, model_name: Optional[str] = None, host: str = "localhost", port: int = 11434,
                 timeout: int = 180, max_retries: int = 2, retry_delay: int = 5, temperature: float = 0.2):
        """Initialize Ollama client.

        Args:
            model_name: Name of the Ollama model to use
            host: Ollama host
            port: Ollama port
            timeout: Timeout in seconds for Ollama requests
            max_retries: Attempts for timeouts and connection errors
            retry_delay: Seconds to wait between attempts
            temperature: Sampling temperature
        """
        self.ollama_model = model_name or self.DEFAULT_MODEL
        self.ollama_base_url = f"http://{host}:{port}"
        self.timeout = timeout
        self.max_retries = max(1, max_retries)
        self.retry_delay = retry_delay
        self.temperature = temperature
        self.logger = logging.getLogger(__name__)

    @classmethod
    def from_config(cls, config, model_name: Optional[str] = None) -> 'OllamaClient':
        """Build a client from the [OLLAMA] section of a ConfigManager."""
        return cls(
            model_name=model_name or config.get('OLLAMA', 'model', cls.DEFAULT_MODEL),
            host=config.get('OLLAMA', 'host', 'localhost'),
            port=config.get_int('OLLAMA', 'port', 11434),
            timeout=config.get_int('OLLAMA', 'timeout', 180),
            max_retries=config.get_int('OLLAMA', 'max_retries', 2),
            retry_delay=config.get_int('OLLAMA', 'retry_delay', 5),
        )

    def call_json(self, prompt: str, system: Optional[str] = None) -> Dict:
        """Send a prompt and parse the reply as a JSON object.

        Args:
            prompt: User prompt
            system: Optional system prompt

        Returns:
            Parsed JSON object, or an empty dict on any failure
        """
        payload = {
            "model": self.ollama_model,
            "prompt": prompt,
            "stream": False,
            "options": {"temperature": self.temperature},
        }
        if system:
            payload["system"] = system

        url = f"{self.ollama_base_url}/api/generate"
        for attempt in range(self.max_retries):
            try:
                response = requests.post(url, json=payload, timeout=self.timeout)
                response.raise_for_status()
                return self.parse_json_response(response.json().get('response', ''))
            except (requests.exceptions.Timeout, requests.exceptions.ConnectionError) as e:
                # Container may still be loading the model
                if attempt < self.max_retries - 1:
                    self.logger.info(f"Ollama not ready ({e}), retrying in {self.retry_delay}s")
                    time.sleep(self.retry_delay)
                    continue
                self.logger.warning(f"Ollama request failed after {self.max_retries} attempts: {e}")
            except requests.exceptions.RequestException as e:
                self.logger.warning(f"Ollama request failed: {e}")
            except ValueError as e:
                self.logger.warning(f"Ollama returned invalid JSON envelope: {e}")
            break
        return {}

    def parse_json_response(self, response: str) -> Dict:
        """Extract the JSON object from a model reply.

        Args:
            response: Raw text returned by the model

        Returns:
            Parsed dict, or {} if no object could be parsed
        """
        text = re.sub(r'^```(?:json)?\s*|```\s*$', '', (response or '').strip()).strip()
        start_idx = text.find('{')
        end_idx = text.rfind('}')
        if start_idx == -1 or end_idx <= start_idx:
            self.logger.warning("Could not find JSON in Ollama response")
            return {}

        json_str = text[start_idx:end_idx + 1]
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            self.logger.warning(f"Error parsing JSON from Ollama: {e}")
            self.logger.debug(f"JSON string: {json_str[:200]}...")
            return {}
        return data if isinstance(data, dict) else {}

"""
HuggingFace Client - Local model for the similarity oracle

Responsibilities:
- Load a causal LM (optionally 4-bit quantized) and its tokenizer
- Wrap prompts in the tokenizer's chat template when the model has one
- Generate short, low-temperature completions
- Strip markdown fences from completions
- Optional diagnostics (token counts, latency)

Design principles:
- Dependency injection (no singleton); the oracle takes any object with
  generate() and is_loaded()
- Fail fast on critical errors (CUDA missing, OOM at load)
- Not thread-safe: one generation at a time per client
"""

import logging
import time

import torch
from transformers import AutoModelForCausalLM, AutoTokenizer, BitsAndBytesConfig

logger = logging.getLogger(__name__)

DEFAULT_SYSTEM_PROMPT = (
    "You are an expert at detecting semantic similarity between questions. "
    "You must determine if questions ask about the same concept, even if worded differently."
)


class HuggingFaceClient:
    """Local chat model used to judge question similarity."""

    def __init__(self, model_name, load_in_4bit=True, device="cuda", system_prompt=DEFAULT_SYSTEM_PROMPT):
        """
        Args:
            model_name (str): HuggingFace model identifier
            load_in_4bit (bool): NF4 quantization (CUDA only)
            device (str): "cuda" or "cpu"
            system_prompt (str): System message for chat-template models

        Raises:
            RuntimeError: If CUDA requested but not available
            Exception: If tokenizer or model loading fails
        """
        self.model_name = model_name
        self.device = device
        self.system_prompt = system_prompt

        if device == "cuda" and not torch.cuda.is_available():
            raise RuntimeError("CUDA requested but not available. Check nvidia-smi.")

        logger.info(f"Loading similarity model: {model_name} on {device} (4-bit: {load_in_4bit})")

        quantization_config = None
        if load_in_4bit and device == "cuda":
            quantization_config = BitsAndBytesConfig(
                load_in_4bit=True,
                bnb_4bit_quant_type="nf4",
                bnb_4bit_compute_dtype=torch.bfloat16,
                bnb_4bit_use_double_quant=True
            )

        try:
            self.tokenizer = AutoTokenizer.from_pretrained(model_name)
        except Exception as e:
            logger.error(f"Failed to load tokenizer: {e}")
            raise

        try:
            self.model = AutoModelForCausalLM.from_pretrained(
                model_name,
                quantization_config=quantization_config,
                device_map="auto" if device == "cuda" else None,
                torch_dtype=torch.bfloat16 if device == "cuda" else torch.float32
            )
        except torch.cuda.OutOfMemoryError:
            logger.error("CUDA Out of Memory during model loading")
            raise
        except Exception as e:
            logger.error(f"Failed to load model: {e}")
            raise

        self.model.eval()
        self.has_chat_template = getattr(self.tokenizer, "chat_template", None) is not None
        logger.info(f"Similarity model ready (chat template: {self.has_chat_template})")

    def is_loaded(self):
        return self.model is not None and self.tokenizer is not None

    def format_prompt(self, prompt):
        """Apply the chat template if the tokenizer has one, else pass through."""
        if not self.has_chat_template:
            return prompt

        messages = [
            {"role": "system", "content": self.system_prompt},
            {"role": "user", "content": prompt},
        ]
        return self.tokenizer.apply_chat_template(messages, tokenize=False, add_generation_prompt=True)

    def generate(self, prompt, max_tokens=300, temperature=0.1, return_diagnostics=False):
        """
        Generate a completion.

        Args:
            prompt (str): User prompt (chat template applied here)
            max_tokens (int): Maximum new tokens
            temperature (float): Sampling temperature (0.0 = greedy)
            return_diagnostics (bool): Include token counts and timing

        Returns:
            str: Completion with markdown fences removed
            dict: {'text': str, 'diagnostics': {...}} (if return_diagnostics=True)

        Raises:
            RuntimeError: If the model is not loaded
            torch.cuda.OutOfMemoryError: If GPU runs out of memory
        """
        if not self.is_loaded():
            raise RuntimeError("Model not loaded")

        start_time = time.time()

        inputs = self.tokenizer(self.format_prompt(prompt), return_tensors="pt")
        if self.device == "cuda":
            inputs = inputs.to("cuda")
        prompt_tokens = inputs.input_ids.shape[1]

        try:
            with torch.no_grad():
                outputs = self.model.generate(
                    inputs.input_ids,
                    attention_mask=inputs.attention_mask,
                    max_new_tokens=max_tokens,
                    temperature=temperature if temperature > 0 else None,
                    do_sample=temperature > 0,
                    pad_token_id=self.tokenizer.eos_token_id
                )
        except torch.cuda.OutOfMemoryError:
            logger.error(f"CUDA OOM during generation (prompt tokens: {prompt_tokens})")
            raise

        generated_ids = outputs[0][prompt_tokens:]
        text = strip_code_fences(self.tokenizer.decode(generated_ids, skip_special_tokens=True))

        if return_diagnostics:
            return {
                "text": text,
                "diagnostics": {
                    "prompt_tokens": prompt_tokens,
                    "completion_tokens": len(generated_ids),
                    "latency_ms": (time.time() - start_time) * 1000
                }
            }
        return text

    def get_model_info(self):
        info = {
            "model_name": self.model_name,
            "device": self.device,
            "is_loaded": self.is_loaded(),
            "chat_template": self.has_chat_template
        }
        if self.device == "cuda" and torch.cuda.is_available():
            info["gpu_memory_allocated_gb"] = torch.cuda.memory_allocated() / 1e9
        return info


def strip_code_fences(text):
    """
    Remove a surrounding markdown code block from model output.

    Examples:
        >>> strip_code_fences("```text\\nSIMILAR: NO\\n```")
        'SIMILAR: NO'
        >>> strip_code_fences("  SIMILAR: YES ")
        'SIMILAR: YES'
    """
    text = text.strip()
    if text.startswith("```"):
        first_newline = text.find("\n")
        text = text[first_newline + 1:] if first_newline != -1 else text[3:]
    if text.endswith("```"):
        text = text[:-3]
    return text.strip()

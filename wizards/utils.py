import json
import logging
import re

import commentjson
import yaml
from json_repair import repair_json
from pydantic import TypeAdapter, ValidationError

from wizards.errors import GenerationFailedError

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
)

logger = logging.getLogger("ollo_backend")


class Utils():
    def clean_triple_backticks(self, code) -> str:
        pattern = r'```[a-zA-Z]*\n?|```\n?'
        return re.sub(pattern, '', code)

    def load_fault_tolerant_json(self, json_str):
        """
        Parse JSON-ish model output: plain/commented JSON first, then YAML on a
        sanitized copy, then the same two on a json_repair'ed copy.
        Raises ValueError when nothing yields a structured value.
        """
        def sanitize_json_string(input_str):
            def process_string_segment(match):
                content = match.group(1)
                # lone backslashes, raw newlines and bare quotes inside strings
                content = re.sub(r'(?<!\\)\\(?![bfnrtu"\\/])', r'\\\\', content)
                content = re.sub(r'(?<!\\)\n', r'\\n', content)
                content = re.sub(r'(?<!\\)"', r'\"', content)
                return f'"{content}"'

            input_str = self.clean_triple_backticks(input_str)
            input_str = re.sub(r'//.*?$|/\*.*?\*/', '', input_str, flags=re.MULTILINE | re.DOTALL)
            return re.sub(r'(?<!\\)"((?:[^"\\]|\\.)*?)"', process_string_segment, input_str, flags=re.DOTALL)

        def load_json(raw):
            err = ""
            try:
                data = commentjson.loads(self.clean_triple_backticks(raw).strip())
                if isinstance(data, (dict, list)):
                    return data, ""
                err = "JSON did not yield an object or array"
            except Exception as e:
                err = str(e)
            try:
                data = yaml.safe_load(sanitize_json_string(raw))
                if isinstance(data, (dict, list)):
                    return data, ""
                err += "\n--\nYAML parsing did not yield an object or array"
            except yaml.YAMLError as e:
                err += "\n--\n" + str(e)
            return None, err

        data, err = load_json(json_str or "")
        if data is not None:
            return data
        r_data, r_err = load_json(repair_json(json_str or ""))
        if r_data is not None:
            return r_data
        raise ValueError(f"load_fault_tolerant_json: JSON parsing failed: {err} | after repair: {r_err}")

    def parse_structured_output(self, raw: str, shape):
        """
        Load model output as JSON and validate it against `shape` (a pydantic
        model or type). Any parse or shape problem is a GenerationFailedError.
        """
        try:
            data = self.load_fault_tolerant_json(raw)
        except ValueError as e:
            logger.warning("Unparsable structured output: %s", e)
            raise GenerationFailedError("Completion provider returned unparsable content") from e
        try:
            return TypeAdapter(shape).validate_python(data)
        except ValidationError as e:
            logger.warning("Structured output has the wrong shape: %s", e)
            raise GenerationFailedError("Completion provider returned content of unexpected shape") from e

    def _coerce_field_to_str(self, value) -> str:
        if value is None:
            return ""
        if isinstance(value, str):
            return value.strip()
        try:
            return json.dumps(value, ensure_ascii=False, indent=2)
        except TypeError:
            return str(value).strip()

    def unsafe_string_format(self, dest_string, print_unused_keys_report=True, **kwargs):
        """
        Replace {KEY} placeholders only for the keys passed in kwargs; any other
        {...} in the template (JSON examples, etc.) is left as it is.
        """
        missing_keys = []

        def replacer(match):
            key = match.group(1)
            if key in kwargs:
                return str(kwargs[key])
            missing_keys.append(key)
            return match.group(0)

        result = re.sub(r'\{(\w+)\}', replacer, dest_string)
        if missing_keys and print_unused_keys_report:
            logger.debug(f"Missing keys within string-to-format in unsafe_string_format: {', '.join(missing_keys)}")
        return result

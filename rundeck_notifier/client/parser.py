"""Parse Rundeck API XML responses into domain models.

Rundeck (API v1) wraps every answer in a ``<result>`` element. Failures look
like::

    <result error="true" apiversion="1">
      <error><message>Job ID does not exist: 42</message></error>
    </result>

Executions are nested in ``<executions>`` and carry their id, status and
follow URL as attributes; job definitions come wrapped in ``<joblist>``.
The walk below checks every required field explicitly and raises
MalformedResponseError instead of producing a model with a missing id.
"""

import xml.etree.ElementTree as ET
from typing import List, Optional, Union

from rundeck_notifier.domain.models import Execution, ExecutionStatus, Job, JobOption
from rundeck_notifier.logging import get_logger
from rundeck_notifier.utils.timestamps import from_epoch_millis, parse_iso_datetime

from .exceptions import ApiError, MalformedResponseError

logger = get_logger(__name__, component="parser")

Payload = Union[str, bytes]

UNKNOWN_ERROR_MESSAGE = "Rundeck reported an error without a message"

ERROR_TAGS = ("error", "failure")


def parse_document(payload: Payload) -> ET.Element:
    """Parse a payload into its root element.

    Raises:
        MalformedResponseError: If the payload is empty or not XML
    """
    if payload is None or not payload.strip():
        raise MalformedResponseError("Empty response from Rundeck")

    try:
        return ET.fromstring(payload)
    except ET.ParseError as e:
        raise MalformedResponseError(f"Response is not valid XML: {e}") from e


def find_error_message(root: ET.Element) -> Optional[str]:
    """Return the service error message if the document reports a failure.

    Returns:
        The message text verbatim, a generic message when the error carries
        none, or None when the document is not an error document.
    """
    if root.tag in ERROR_TAGS:
        return _error_text(root)

    indicator = next((child for child in root if child.tag in ERROR_TAGS), None)
    is_error = root.get("error") == "true" or root.get("success") == "false"
    if not is_error and (indicator is None or root.get("success") == "true"):
        return None

    if indicator is None:
        return UNKNOWN_ERROR_MESSAGE
    return _error_text(indicator)


def _error_text(element: ET.Element) -> str:
    message = element.findtext("message")
    if message is None and element.text and element.text.strip():
        message = element.text
    return message if message is not None else UNKNOWN_ERROR_MESSAGE


def parse_error(payload: Payload) -> Optional[str]:
    """Return the error message of a payload, or None if it is not an error.

    Never raises: a payload that is not XML simply is not an error document.
    """
    try:
        root = parse_document(payload)
    except MalformedResponseError:
        return None
    return find_error_message(root)


def _raise_for_error(root: ET.Element) -> None:
    message = find_error_message(root)
    if message is not None:
        logger.debug(
            "Rundeck returned an error document",
            extra={"event": "parser.api_error", "error_message": message},
        )
        raise ApiError(message)


def _locate(root: ET.Element, tag: str) -> ET.Element:
    if root.tag == tag:
        return root
    element = root.find(f".//{tag}")
    if element is None:
        raise MalformedResponseError(f"No <{tag}> element in response (root is <{root.tag}>)")
    return element


def _text(element: Optional[ET.Element]) -> Optional[str]:
    if element is None or element.text is None:
        return None
    stripped = element.text.strip()
    return stripped or None


def _child_text(element: ET.Element, path: str) -> Optional[str]:
    return _text(element.find(path))


def _parse_date(element: Optional[ET.Element]):
    if element is None:
        return None

    unixtime = element.get("unixtime")
    if unixtime:
        try:
            return from_epoch_millis(unixtime)
        except (ValueError, OverflowError):
            logger.warning(
                "Ignoring invalid unixtime attribute",
                extra={"event": "parser.invalid_date", "unixtime": unixtime},
            )

    return parse_iso_datetime(element.text)


def _parse_job_options(job_element: ET.Element) -> List[JobOption]:
    options = []
    for option in job_element.findall("context/options/option"):
        name = option.get("name")
        if not name:
            raise MalformedResponseError("Job option without a name")
        options.append(
            JobOption(
                name=name,
                required=option.get("required") == "true",
                default_value=option.get("value"),
            )
        )
    return options


def _build_job(job_element: ET.Element) -> Job:
    job_id = _child_text(job_element, "id") or (job_element.get("id") or "").strip()
    if not job_id:
        raise MalformedResponseError("Job has no id")

    return Job(
        id=job_id,
        name=_child_text(job_element, "name"),
        group=_child_text(job_element, "group"),
        project=_child_text(job_element, "project") or _child_text(job_element, "context/project"),
        description=_child_text(job_element, "description"),
        options=tuple(_parse_job_options(job_element)),
    )


def _build_execution(element: ET.Element) -> Execution:
    raw_id = element.get("id")
    if raw_id is None or not raw_id.strip():
        raise MalformedResponseError("Execution has no id")
    try:
        execution_id = int(raw_id)
    except ValueError as e:
        raise MalformedResponseError(f"Execution id is not an integer: {raw_id!r}") from e

    status_text = element.get("status")
    if status_text is None:
        raise MalformedResponseError(f"Execution {execution_id} has no status")

    job_element = element.find("job")

    return Execution(
        id=execution_id,
        status=ExecutionStatus.from_wire(status_text),
        status_text=status_text,
        url=element.get("href"),
        started_at=_parse_date(element.find("date-started")),
        ended_at=_parse_date(element.find("date-ended")),
        started_by=_child_text(element, "user"),
        aborted_by=_child_text(element, "abortedby"),
        description=_child_text(element, "description"),
        job=_build_job(job_element) if job_element is not None else None,
    )


def parse_job(payload: Payload) -> Job:
    """Parse a job definition document.

    Args:
        payload: XML body of ``GET /api/1/job/{id}``

    Returns:
        Parsed Job

    Raises:
        ApiError: If the document reports a service error
        MalformedResponseError: If it is not XML or has no job id
    """
    root = parse_document(payload)
    _raise_for_error(root)
    return _build_job(_locate(root, "job"))


def parse_execution(payload: Payload) -> Execution:
    """Parse a trigger or execution status document.

    Args:
        payload: XML body of ``/api/1/job/{id}/run`` or ``/api/1/execution/{id}``

    Returns:
        Parsed Execution, including its embedded Job when present

    Raises:
        ApiError: If the document reports a service error
        MalformedResponseError: If it is not XML or lacks id or status
    """
    root = parse_document(payload)
    _raise_for_error(root)
    return _build_execution(_locate(root, "execution"))

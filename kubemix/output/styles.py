"""Document templates for the markdown, xml and plain output styles.

Templates are ``str.format`` strings. Values substituted into them are never
re-formatted, so braces inside kubectl output are safe.
"""

from __future__ import annotations

GENERATION_HEADER: str = (
    "This file is a merged representation of Kubernetes cluster resources, "
    "generated by kubemix on {generated_at}."
)

SUMMARY_PURPOSE: str = """\
This file contains a packed representation of the resources in a Kubernetes
cluster. It is designed to be easily consumable by AI systems for analysis,
troubleshooting or documentation, and by humans reviewing cluster state.\
"""

SUMMARY_FILE_FORMAT: str = """\
The content is organized as follows:
1. This summary section
2. A cluster resource overview (namespaces and the resources inside them)
3. A Namespaces section listing every namespace in the cluster\
"""

SUMMARY_USAGE_GUIDELINES: str = """\
- Treat this file as a read-only snapshot; the cluster may have changed since it was generated.
- Every section shows the exact kubectl command that produced it, so any part can be re-run by hand.
- When reporting on a resource, refer to it by kind, namespace and name.\
"""

NOTE_REDACTED: str = "- Secret values have been redacted and replaced with {placeholder}."
NOTE_NOT_REDACTED: str = "- Secret redaction was DISABLED for this run; the file may contain sensitive data."
NOTE_OUTPUT_FORMAT: str = "- Resource data was fetched with output format: {output_format}."
NOTE_EXCLUDED: str = "- System namespaces and high-churn kinds (such as events) are excluded by default."
NOTE_DIAGNOSTICS: str = (
    "- {count} unhealthy pod(s) were found; describe output and recent logs are included "
    "in the Failing Pod Diagnostics section."
)
NOTE_FAILED_NAMESPACES: str = "- The following namespaces could not be fetched and are shown as empty: {namespaces}."

NO_OUTPUT: str = "(no output)"

# Sub-call labels used inside diagnostics sections
DIAG_DESCRIBE: str = "Describe"
DIAG_LOGS: str = "Logs"
DIAG_PREVIOUS_LOGS: str = "Previous Logs"

# ---------------------------------------------------------------------------
# Markdown
# ---------------------------------------------------------------------------

MARKDOWN_DOCUMENT: str = """\
{header}

# Cluster Summary

## Purpose
{purpose}

## File Format
{file_format}
4. Resource details, each consisting of:
  a. A header indicating the resource type (e.g., ## Resource: Namespaces)
  b. The exact kubectl command used to fetch the resource.
  c. The full output of the command in a code block.

## Usage Guidelines
{usage_guidelines}

## Notes
{notes}

# Cluster Resource Overview
```
{tree}
```

# Resources

{blocks}
{diagnostics}"""

MARKDOWN_RESOURCE_HEADING: str = "## Resource: {kind}"
MARKDOWN_NAMESPACED_HEADING: str = "## Resource: {kind} (Namespace: {namespace})"
MARKDOWN_NAMESPACE_HEADING: str = "## Resources in Namespace: {namespace}"

MARKDOWN_BLOCK: str = """\
{heading}
```bash
# Command used to generate the output below:
{command}
```

```
{output}
```
"""

MARKDOWN_DIAGNOSTICS: str = """\
# Failing Pod Diagnostics

{pods}"""

MARKDOWN_POD_HEADING: str = "## Pod: {name} (Namespace: {namespace})"
MARKDOWN_DIAG_HEADING: str = "### {label}"
MARKDOWN_DIAG_ERROR: str = "**Diagnostics incomplete:** {error}\n"

# ---------------------------------------------------------------------------
# XML
# ---------------------------------------------------------------------------

XML_DOCUMENT: str = """\
{header}

<cluster_summary>
This section contains a summary of the aggregated Kubernetes resources.

<purpose>
{purpose}
</purpose>

<file_format>
{file_format}
4. Kubernetes resources, each consisting of:
  - Resource kind and namespace as attributes.
  - The kubectl command used to fetch the resource.
  - The full output of the command.
</file_format>

<usage_guidelines>
{usage_guidelines}
</usage_guidelines>

<notes>
{notes}
</notes>
</cluster_summary>

<cluster_resource_overview>
{tree}
</cluster_resource_overview>

<resources>
This section contains the output of the aggregated Kubernetes resources.

{blocks}
</resources>
{diagnostics}"""

XML_BLOCK: str = """\
<resource kind={kind}{namespace_attr}>
  <command_used><![CDATA[
{command}
]]></command_used>
  <manifest><![CDATA[
{output}
]]></manifest>
</resource>
"""

XML_DIAGNOSTICS: str = """\
<failing_pod_diagnostics>
{pods}</failing_pod_diagnostics>
"""

XML_POD: str = """\
<pod name={name} namespace={namespace}>
{error}{calls}</pod>
"""

XML_DIAG_CALL: str = """\
  <{tag}>
    <command_used><![CDATA[
{command}
]]></command_used>
    <output><![CDATA[
{output}
]]></output>
  </{tag}>
"""

XML_DIAG_ERROR: str = "  <error>{error}</error>\n"

# ---------------------------------------------------------------------------
# Plain
# ---------------------------------------------------------------------------

PLAIN_SEPARATOR: str = "=" * 16
PLAIN_LONG_SEPARATOR: str = "=" * 64

PLAIN_DOCUMENT: str = f"""\
{{header}}

{PLAIN_LONG_SEPARATOR}
Cluster Summary
{PLAIN_LONG_SEPARATOR}

Purpose:
--------
{{purpose}}

File Format:
------------
{{file_format}}
4. Resource details, each consisting of:
  a. A separator line ({PLAIN_SEPARATOR})
  b. Resource kind indication (e.g., Resource: Namespaces)
  c. The kubectl command used
  d. Another separator line
  e. The full output of the command
  f. A blank line

Usage Guidelines:
-----------------
{{usage_guidelines}}

Notes:
------
{{notes}}

{PLAIN_LONG_SEPARATOR}
Cluster Resource Overview
{PLAIN_LONG_SEPARATOR}
{{tree}}

{PLAIN_LONG_SEPARATOR}
Resources
{PLAIN_LONG_SEPARATOR}

{{blocks}}
{{diagnostics}}
{PLAIN_LONG_SEPARATOR}
End of Kubernetes Resource Aggregation
{PLAIN_LONG_SEPARATOR}"""

PLAIN_RESOURCE_LABEL: str = "Resource: {kind}"
PLAIN_NAMESPACED_LABEL: str = "Resource: {kind} (Namespace: {namespace})"
PLAIN_NAMESPACE_LABEL: str = "Resources in Namespace: {namespace}"

PLAIN_BLOCK: str = f"""\
{PLAIN_SEPARATOR}
{{label}}
Command Used: {{command}}
{PLAIN_SEPARATOR}
{{output}}

"""

PLAIN_DIAGNOSTICS: str = f"""\
{PLAIN_LONG_SEPARATOR}
Failing Pod Diagnostics
{PLAIN_LONG_SEPARATOR}

{{pods}}"""

PLAIN_POD_LABEL: str = "Pod: {name} (Namespace: {namespace})"
PLAIN_DIAG_ERROR: str = "Diagnostics incomplete: {error}\n\n"

"""
Report formatting: marks CSV, statistics CSV and a printable HTML report.

All functions are pure; delivering the result (saving, printing) is the job
of an ExportSink.
"""

import csv
import html
import io
import re
from dataclasses import dataclass
from datetime import date, datetime, timezone
from string import Template
from typing import Any, List, Optional, Sequence

from ..core.enums import AssessmentComponent, ExportKind, Grade, MAX_TOTAL_MARKS
from ..core.grading import is_passing
from ..core.models import ClassStatistics, StudentMarks, StudentWithMarks


NOT_AVAILABLE = "N/A"
NO_MARKS = "No Marks"
PASS = "Pass"
FAIL = "Fail"

CSV_MIME_TYPE = "text/csv"
HTML_MIME_TYPE = "text/html"

MARKS_CSV_HEADERS: List[str] = (
    ["Registration Number", "First Name", "Last Name", "Email"]
    + [f"{component.label} ({component.max_marks})" for component in AssessmentComponent]
    + [f"Total Score ({MAX_TOTAL_MARKS})", "Grade", "Status"]
)


@dataclass(frozen=True)
class ExportData:
    """A rendered export, ready to be delivered."""
    filename: str
    data: str
    mime_type: str

    @property
    def extension(self) -> str:
        return self.filename.rsplit(".", 1)[-1]


# ============================================
# Helpers
# ============================================

def _now() -> datetime:
    return datetime.now(timezone.utc)


def sanitize_name(name: str) -> str:
    """Replace every character outside [A-Za-z0-9] with an underscore."""
    return re.sub(r"[^A-Za-z0-9]", "_", name)


def build_filename(course_name: str, kind: ExportKind, extension: str,
                   today: Optional[date] = None) -> str:
    """``<sanitized-course-name>_<kind>_<YYYY-MM-DD>.<ext>``"""
    today = today or _now().date()
    return f"{sanitize_name(course_name)}_{kind.value}_{today.isoformat()}.{extension}"


def format_score(value: Optional[float]) -> str:
    """Render a score without a trailing ``.0``; missing scores become N/A."""
    if value is None:
        return NOT_AVAILABLE
    return f"{value:g}"


def status_label(marks: Optional[StudentMarks]) -> str:
    if marks is None:
        return NO_MARKS
    return PASS if is_passing(marks.grade) else FAIL


def to_csv(headers: Sequence[Any], rows: Sequence[Sequence[Any]]) -> str:
    """Write rows with RFC 4180 quoting (fields with commas, quotes or newlines are quoted)."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n", quoting=csv.QUOTE_MINIMAL)
    writer.writerow(headers)
    writer.writerows(rows)
    return buffer.getvalue()


def parse_csv(text: str) -> List[List[str]]:
    """Read CSV text back into rows of strings."""
    return list(csv.reader(io.StringIO(text)))


# ============================================
# CSV exports
# ============================================

def _marks_row(student: StudentWithMarks) -> List[str]:
    marks = student.marks
    row = [student.registration_number, student.first_name, student.last_name, student.email]
    for component in AssessmentComponent:
        row.append(format_score(marks.component(component) if marks else None))
    row.append(format_score(marks.total_score if marks else None))
    row.append(marks.grade.value if marks else NOT_AVAILABLE)
    row.append(status_label(marks))
    return row


def export_marks_csv(students: Sequence[StudentWithMarks], course_name: str = "Course",
                     today: Optional[date] = None) -> ExportData:
    """One row per student; students without marks are kept with N/A values."""
    rows = [_marks_row(student) for student in students]
    return ExportData(
        filename=build_filename(course_name, ExportKind.MARKS, "csv", today),
        data=to_csv(MARKS_CSV_HEADERS, rows),
        mime_type=CSV_MIME_TYPE,
    )


def export_statistics_csv(statistics: ClassStatistics, today: Optional[date] = None) -> ExportData:
    """Summary metrics followed by the full grade distribution."""
    rows: List[List[Any]] = [
        ["Course", statistics.course_name],
        ["Total Students", statistics.total_students],
        ["Students with Marks", statistics.students_with_marks],
        ["Average Score", format_score(statistics.average_score)],
        ["Highest Score", format_score(statistics.highest_score)],
        ["Lowest Score", format_score(statistics.lowest_score)],
        ["Pass Rate (%)", format_score(statistics.pass_rate)],
        ["", ""],
        ["Grade Distribution", ""],
    ]
    rows.extend([grade.value, statistics.grade_distribution.get(grade.value, 0)] for grade in Grade)
    return ExportData(
        filename=build_filename(statistics.course_name, ExportKind.STATISTICS, "csv", today),
        data=to_csv(["Metric", "Value"], rows),
        mime_type=CSV_MIME_TYPE,
    )


# ============================================
# Printable HTML
# ============================================

_HTML_TEMPLATE = Template("""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>$course_name - Student Marks</title>
  <style>
    * { margin: 0; padding: 0; box-sizing: border-box; }
    body { font-family: Arial, sans-serif; padding: 20px; background: white; color: #333; }
    .toolbar { margin-bottom: 20px; text-align: right; }
    .header { text-align: center; margin-bottom: 30px; border-bottom: 3px solid #333; padding-bottom: 20px; }
    .header h1 { font-size: 28px; margin-bottom: 10px; color: #1a1a1a; }
    .header p { font-size: 14px; color: #666; margin: 5px 0; }
    .info-grid { display: grid; grid-template-columns: 1fr 1fr; gap: 10px; margin-bottom: 30px;
                 padding: 15px; background: #f5f5f5; border-radius: 5px; }
    .info-item { display: flex; gap: 10px; }
    .info-label { font-weight: bold; color: #555; }
    table { width: 100%; border-collapse: collapse; margin-bottom: 30px; }
    th { background: #333; color: white; padding: 12px 8px; text-align: left; font-size: 12px;
         text-transform: uppercase; letter-spacing: 0.5px; }
    td { padding: 10px 8px; border-bottom: 1px solid #ddd; font-size: 13px; }
    .even-row { background: #f9f9f9; }
    .odd-row { background: white; }
    .grade-A, .grade-Aminus { color: #2ecc71; font-weight: bold; }
    .grade-Bplus, .grade-B, .grade-Bminus { color: #3498db; font-weight: bold; }
    .grade-Cplus, .grade-C, .grade-Cminus { color: #f39c12; font-weight: bold; }
    .grade-Dplus, .grade-D, .grade-Dminus { color: #e67e22; font-weight: bold; }
    .grade-F { color: #e74c3c; font-weight: bold; }
    .pass { color: #2ecc71; font-weight: bold; }
    .fail { color: #e74c3c; font-weight: bold; }
    .signature { margin-top: 50px; text-align: right; }
    .signature-line { display: inline-block; border-top: 2px solid #333; padding-top: 5px;
                      margin-top: 40px; min-width: 200px; }
    .footer { margin-top: 40px; padding-top: 20px; border-top: 2px solid #ddd; text-align: center;
              font-size: 12px; color: #666; }
    @media print {
      body { padding: 0; }
      .no-print { display: none; }
      table { page-break-inside: auto; }
      tr { page-break-inside: avoid; page-break-after: auto; }
      thead { display: table-header-group; }
    }
  </style>
</head>
<body>
  <div class="toolbar no-print">
    <button type="button" onclick="window.print()">Print</button>
  </div>

  <div class="header">
    <h1>Student Marks Report</h1>
    <p>$course_name</p>
  </div>

  <div class="info-grid">
    <div class="info-item"><span class="info-label">Course:</span><span>$course_name</span></div>
    <div class="info-item"><span class="info-label">Lecturer:</span><span>$lecturer_name</span></div>
    <div class="info-item"><span class="info-label">Total Students:</span><span>$student_count</span></div>
    <div class="info-item"><span class="info-label">Generated:</span><span>$generated_at</span></div>
  </div>

  <table>
    <thead>
      <tr>
        <th>#</th>
        <th>Reg. No.</th>
        <th>Student Name</th>
$component_headers
        <th>Total<br/>($max_total)</th>
        <th>Grade</th>
        <th>Status</th>
      </tr>
    </thead>
    <tbody>
$rows
    </tbody>
  </table>

  <div class="signature">
    <div class="signature-line">
      $lecturer_name<br/>
      <small>Lecturer Signature</small>
    </div>
  </div>

  <div class="footer">
    <p>Online Examination System | Lecturer Module</p>
    <p>Generated on $generated_at</p>
  </div>
</body>
</html>
""")


def _grade_css_class(grade: Optional[Grade]) -> str:
    if grade is None:
        return "grade-NA"
    return "grade-" + grade.value.replace("+", "plus").replace("-", "minus")


def _status_cell(marks: Optional[StudentMarks]) -> str:
    label = status_label(marks)
    if label == PASS:
        return '<span class="pass">Pass</span>'
    if label == FAIL:
        return '<span class="fail">Fail</span>'
    return label


def _html_row(index: int, student: StudentWithMarks) -> str:
    marks = student.marks
    esc = html.escape
    cells = [
        str(index + 1),
        esc(student.registration_number),
        esc(student.full_name),
    ]
    cells.extend(
        format_score(marks.component(component) if marks else None) for component in AssessmentComponent
    )
    cells.append(f"<strong>{format_score(marks.total_score if marks else None)}</strong>")
    grade = marks.grade if marks else None
    row_class = "even-row" if index % 2 == 0 else "odd-row"
    tds = "".join(f"<td>{cell}</td>" for cell in cells)
    return (
        f'      <tr class="{row_class}">{tds}'
        f'<td class="{_grade_css_class(grade)}">{grade.value if grade else NOT_AVAILABLE}</td>'
        f"<td>{_status_cell(marks)}</td></tr>"
    )


def export_marks_html(students: Sequence[StudentWithMarks], course_name: str,
                      lecturer_name: str = "Lecturer",
                      generated_at: Optional[datetime] = None) -> ExportData:
    """Self-contained printable report over the same rows as the marks CSV."""
    generated_at = generated_at or _now()
    esc = html.escape
    component_headers = "\n".join(
        f"        <th>{esc(component.label)}<br/>({component.max_marks})</th>"
        for component in AssessmentComponent
    )
    document = _HTML_TEMPLATE.substitute(
        course_name=esc(course_name),
        lecturer_name=esc(lecturer_name),
        student_count=len(students),
        generated_at=esc(generated_at.strftime("%Y-%m-%d %H:%M %Z").rstrip()),
        component_headers=component_headers,
        max_total=MAX_TOTAL_MARKS,
        rows="\n".join(_html_row(index, student) for index, student in enumerate(students)),
    )
    return ExportData(
        filename=build_filename(course_name, ExportKind.MARKS_REPORT, "html", generated_at.date()),
        data=document,
        mime_type=HTML_MIME_TYPE,
    )

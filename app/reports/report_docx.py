from docx import Document


def generate_report_docx(report: dict, file_path: str):
    doc = Document()

    # Title
    doc.add_heading(f"Assessment Report: {report['assessment_title']}", level=1)

    candidate = report["candidate"]
    doc.add_paragraph(f"Candidate: {candidate['name']} <{candidate['email']}>")
    if report.get("submitted_at"):
        doc.add_paragraph(f"Submitted at: {report['submitted_at']}")

    # Summary
    doc.add_heading("Summary", level=2)
    for line in report["summary"]:
        doc.add_paragraph(line)

    # Scores
    doc.add_heading("Overall Score", level=2)
    scores = report["scores"]
    doc.add_paragraph(
        f"Score: {scores['total_score']} / {scores['max_score']} "
        f"({scores['percentage']}%)"
    )
    doc.add_paragraph(f"Level: {scores['level']}")
    doc.add_paragraph(f"Status: {scores['status']}")

    # Answers
    doc.add_heading("Answers", level=2)
    for item in report["question_breakdown"]:
        doc.add_paragraph(item["question"], style="List Number")
        doc.add_paragraph(f"Answer: {item['answer']}")
        doc.add_paragraph(f"{item['verdict']} ({item['points']} points)")

    doc.save(file_path)

import sys
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from skillzen.resume import (  # noqa: E402
    calculate_ats_score,
    extract_education,
    extract_experience,
    extract_personal_info,
    extract_skills,
    normalize_resume_payload,
)
from skillzen.resume.extractor import MAX_SKILLS, extract_list  # noqa: E402
from skillzen.resume.scoring import score_tier  # noqa: E402
from skillzen.resume.vocabulary import TECH_KEYWORDS  # noqa: E402
from skillzen.schemas.resume import (  # noqa: E402
    NO_DESCRIPTION,
    NO_DURATION,
    NO_FIELD,
    NO_YEAR,
    NOT_PROVIDED,
    UNKNOWN_COMPANY,
    UNKNOWN_DEGREE,
    UNKNOWN_POSITION,
)


class PersonalInfoExtractionTests(unittest.TestCase):
    def test_alternative_containers_and_keys(self):
        info = extract_personal_info(
            {
                "basic_info": {"name": "Jane Roe"},
                "email_address": "jane@example.com",
                "contact_info": {"mobile": "+49 170 000"},
                "location": "Berlin",
                "social_links": {"linkedin": "linkedin.com/in/jane"},
            }
        )
        self.assertEqual(info.name, "Jane Roe")
        self.assertEqual(info.email, "jane@example.com")
        self.assertEqual(info.phone, "+49 170 000")
        self.assertEqual(info.address, "Berlin")
        self.assertEqual(info.linkedin, "linkedin.com/in/jane")
        self.assertEqual(info.website, NOT_PROVIDED)

    def test_contact_info_wins_over_top_level(self):
        info = extract_personal_info({"contact_info": {"name": "Primary"}, "name": "Secondary"})
        self.assertEqual(info.name, "Primary")

    def test_blank_values_fall_through(self):
        info = extract_personal_info({"contact_info": {"email": "   "}, "email": "real@example.com"})
        self.assertEqual(info.email, "real@example.com")


class ExperienceEducationExtractionTests(unittest.TestCase):
    def test_experience_field_aliases(self):
        entries = extract_experience(
            {
                "work_experience": [
                    {
                        "employer": "Acme",
                        "job_title": "Engineer",
                        "period": "2019-2021",
                        "responsibilities": ["Built APIs", "Ran on-call"],
                    }
                ]
            }
        )
        self.assertEqual(len(entries), 1)
        self.assertEqual(entries[0].company, "Acme")
        self.assertEqual(entries[0].position, "Engineer")
        self.assertEqual(entries[0].duration, "2019-2021")
        self.assertEqual(entries[0].description, "Built APIs Ran on-call")

    def test_duration_is_composed_from_dates(self):
        entries = extract_experience(
            {
                "experience": [
                    {"company": "Acme", "start_date": "2020", "end_date": "2022"},
                    {"company": "Beta", "start_date": "2022", "end_date": ""},
                    {"company": "Gamma", "from_date": "2015", "to_date": "2016"},
                    {"company": "Delta"},
                ]
            }
        )
        self.assertEqual(
            [entry.duration for entry in entries],
            ["2020 - 2022", "2022 - Present", "2015 - 2016", NO_DURATION],
        )

    def test_string_experience_entries_become_descriptions(self):
        entries = extract_experience({"experience": ["Shipped the billing system"]})
        self.assertEqual(entries[0].description, "Shipped the billing system")
        self.assertEqual(entries[0].company, UNKNOWN_COMPANY)
        self.assertEqual(entries[0].position, UNKNOWN_POSITION)

    def test_education_field_aliases(self):
        entries = extract_education(
            {
                "academic_background": [
                    {"university": "TU Berlin", "qualification": "MSc", "major": "Computer Science", "graduation_year": 2019},
                    "Community College",
                ]
            }
        )
        self.assertEqual(entries[0].institution, "TU Berlin")
        self.assertEqual(entries[0].degree, "MSc")
        self.assertEqual(entries[0].field, "Computer Science")
        self.assertEqual(entries[0].year, "2019")
        self.assertEqual(entries[1].institution, "Community College")
        self.assertEqual((entries[1].degree, entries[1].field, entries[1].year), (UNKNOWN_DEGREE, NO_FIELD, NO_YEAR))


class SkillExtractionTests(unittest.TestCase):
    def test_listed_skills_are_deduplicated_case_insensitively(self):
        skills = extract_skills(
            {
                "skills": ["Python", "python", {"name": "Docker"}],
                "technical_skills": [{"skill": "SQL"}, {"label": "docker"}],
            }
        )
        self.assertEqual(skills, ["Python", "Docker", "SQL"])

    def test_overlong_skill_strings_are_dropped(self):
        self.assertEqual(extract_skills({"skills": ["x" * 60, "Python"]}), ["Python"])

    def test_keywords_from_text_sources(self):
        skills = extract_skills(
            {
                "experience": [{"description": "Built services with Kubernetes and PostgreSQL"}],
                "summary": "Known for leadership and teamwork",
                "education": [{"field": "Computer Science", "degree": "BSc"}],
            }
        )
        for expected in ("Kubernetes", "PostgreSQL", "Leadership", "Teamwork", "Computer Science"):
            self.assertIn(expected, skills)

    def test_skills_are_capped(self):
        text = " ".join(TECH_KEYWORDS)
        skills = extract_skills({"experience": [{"description": text}]})
        self.assertEqual(len(skills), MAX_SKILLS)
        self.assertEqual(len({skill.casefold() for skill in skills}), MAX_SKILLS)


class ListExtractionTests(unittest.TestCase):
    def test_lists_accept_alternate_keys_and_objects(self):
        data = {
            "awards": ["Hackathon winner", {"title": "Employee of the year"}, "hackathon winner"],
            "certificates": ["AWS SAA"],
            "language_skills": [{"name": "English"}, "German"],
            "portfolio": ["skillzen.dev"],
        }
        self.assertEqual(extract_list(data, "achievements"), ["Hackathon winner", "Employee of the year"])
        self.assertEqual(extract_list(data, "certifications"), ["AWS SAA"])
        self.assertEqual(extract_list(data, "languages"), ["English", "German"])
        self.assertEqual(extract_list(data, "projects"), ["skillzen.dev"])


class NormalizeResumePayloadTests(unittest.TestCase):
    def test_empty_payload_uses_placeholders(self):
        record = normalize_resume_payload({})
        for value in record.personal_info.model_dump().values():
            self.assertEqual(value, NOT_PROVIDED)
        self.assertEqual(record.ats_score, 0)
        self.assertEqual(record.experience, [])
        self.assertEqual(record.education, [])
        self.assertEqual(record.skills, [])
        self.assertEqual(record.achievements, [])
        self.assertEqual(record.certifications, [])
        self.assertEqual(record.languages, [])
        self.assertEqual(record.projects, [])
        self.assertEqual(record.summary, "")
        self.assertIn("Add professional email address", record.analysis.improvements)
        self.assertIn("needs improvement", record.analysis.overall)

    def test_non_mapping_payload_is_treated_as_empty(self):
        record = normalize_resume_payload(["not", "a", "resume"])
        self.assertEqual(record.ats_score, 0)
        self.assertEqual(record.personal_info.name, NOT_PROVIDED)

    def test_output_read_back_is_stable(self):
        payload = {
            "contact_info": {"name": "Jane Roe", "email": "jane@example.com"},
            "experience": [
                {"company": "Acme", "title": "Engineer", "start_date": "2020"},
                {"organization": "Beta"},
            ],
            "education": [{"school": "TU Berlin", "degree": "MSc"}],
        }
        record = normalize_resume_payload(payload)
        echoed = record.model_dump()

        self.assertEqual(extract_personal_info(echoed), record.personal_info)
        self.assertEqual(extract_experience(echoed), record.experience)
        self.assertEqual(extract_education(echoed), record.education)
        self.assertEqual(record.experience[1].description, NO_DESCRIPTION)
        self.assertEqual(record.education[0].institution, "TU Berlin")

    def test_camel_case_serialization_and_raw_data(self):
        record = normalize_resume_payload({"name": "Jane"}, source="APYHub", include_raw=True)
        body = record.model_dump(by_alias=True)
        self.assertIn("atsScore", body)
        self.assertEqual(body["personalInfo"]["name"], "Jane")
        self.assertEqual(body["source"], "APYHub")
        self.assertEqual(body["rawData"], {"name": "Jane"})
        self.assertIsNone(normalize_resume_payload({"name": "Jane"}).raw_data)

    def test_no_backfill_from_unknown_containers(self):
        record = normalize_resume_payload({"unknown": {"education": [{"school": "Hidden"}]}})
        self.assertEqual(record.education, [])


class AtsScoreTests(unittest.TestCase):
    def test_reference_payload_scores_sixty(self):
        payload = {
            "contact_info": {"email": "a@b.com", "phone": "1"},
            "summary": "x",
            "experience": [{"description": "a" * 60}],
            "education": [{"degree": "BS", "institution": "X"}],
            "skills": ["Python", "Java"],
        }
        self.assertEqual(calculate_ats_score(payload), 60)
        self.assertEqual(score_tier(60), "good")

    def test_empty_payload_scores_zero(self):
        self.assertEqual(calculate_ats_score({}), 0)
        self.assertEqual(calculate_ats_score(None), 0)

    def test_keyword_points(self):
        payload = {"experience": [{"description": "Led team and improved latency, reduced cost"}]}
        # 5 for the entry, 3 keywords at 2 points each.
        self.assertEqual(calculate_ats_score(payload), 11)

    def test_technical_skill_bonus(self):
        self.assertEqual(calculate_ats_score({"skills": ["Programming in Python"]}), 7)

    def test_score_is_clamped(self):
        payload = {
            "contact_info": {
                "email": "a@b.com",
                "phone": "1",
                "address": "Street",
                "linkedin": "li",
                "website": "site",
            },
            "summary": "Accomplished engineer who managed, developed and optimized systems.",
            "experience": [{"description": "Implemented and increased throughput " + "x" * 60}] * 5,
            "education": [{"degree": "BS", "institution": "X"}] * 3,
            "skills": [f"Software tool {index}" for index in range(10)],
            "achievements": ["Achievement unlocked"],
            "certifications": ["AWS"],
        }
        score = calculate_ats_score(payload)
        self.assertEqual(score, 100)
        self.assertEqual(score_tier(score), "excellent")


if __name__ == "__main__":
    unittest.main()

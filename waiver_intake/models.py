from datetime import datetime, timezone
from flask_sqlalchemy import SQLAlchemy

def get_now_utc():
    return datetime.now(timezone.utc)

db = SQLAlchemy()

# Form vocabulary (plain strings, same values the front-end posts)
ID_TYPES = ['Driver License', 'Passport', 'Birth Certificate']

PROCEDURE_TYPES = ['Tattoo', 'Permanent cosmetics', 'Branding', 'Piercing']

PRACTITIONERS = [
    'Jeremy Swan',
    'Derrek Everette',
    'Matt Soderberg',
    'Josue Acosta',
    'Josh Ojeda',
    'Other',
]

# key -> label shown on the form; stored as mh_<key>
MEDICAL_CONDITIONS = [
    ('tb', 'TB'),
    ('asthma', 'Asthma'),
    ('eczema_psoriasis', 'Eczema / Psoriasis'),
    ('gonorrhea', 'Gonorrhea'),
    ('hiv', 'HIV'),
    ('hepatitis', 'Hepatitis'),
    ('heart_conditions', 'Heart Conditions'),
    ('syphilis', 'Syphilis'),
    ('herpes', 'Herpes'),
    ('skin_conditions', 'Skin Conditions'),
    ('pregnant_nursing', 'Pregnant / Nursing'),
    ('mrsa_staph', 'MRSA / Staph'),
    ('diabetes', 'Diabetes'),
    ('blood_thinners', 'Blood Thinners'),
    ('fainting_dizziness', 'Fainting / Dizziness'),
    ('latex_allergies', 'Latex Allergies'),
    ('epilepsy', 'Epilepsy'),
    ('hemophilia', 'Hemophilia'),
    ('scarring_keloiding', 'Scarring / Keloiding'),
    ('antibiotic_allergies', 'Antibiotic Allergies'),
]

# key -> label prefix used when folding answers into medical_notes
MEDICAL_QUESTIONS = [
    ('last_ate', 'Last ate'),
    ('allergies', 'Allergies'),
    ('medications', 'Medications'),
    ('herpes_history', 'Herpes history'),
    ('other_conditions', 'Other conditions'),
    ('antibiotics_history', 'Prophylactic antibiotics'),
    ('cardiac_valve', 'Cardiac valve disease'),
    ('extra_info', 'Extra info'),
]

# Ordered; every one must be acknowledged before the form is sent.
CONSENT_ITEMS = [
    ('ack_age', 'I am the person on the legal ID presented as proof that I am at least 18 years of age.'),
    ('ack_underage_ok', 'I am under the age of 18 years old and have the presence of my parent or guardian to receive the body piercing. (Applicable only to underage body piercing. N/A if not applicable).'),
    ('ack_sober', 'I am not under the influence of alcohol or drugs and I am voluntarily submitting myself to receive body art without duress or coercion.'),
    ('ack_truthful', 'I acknowledge that the information that I have provided in the medical questionnaire is complete and true to the best of my knowledge.'),
    ('ack_permanent', 'I understand the permanent nature of receiving body art and that removal can be expensive and may leave scars on the procedure site.'),
    ('ack_placement', 'The body art described or shown on the client record form is correctly placed to my specifications.'),
    ('ack_qs_answered', 'All questions about the body art procedure have been answered to my satisfaction, and I have been given written aftercare instructions for the procedure I am about to receive.'),
    ('ack_restrictions', 'I understand the restrictions on physical activities such as bathing, recreational water activities, gardening, contact with animals, and the durations of the restrictions.'),
    ('ack_hippa', 'I understand that any medical information obtained will be subject to the federal Health Insurance Portability and Accountability Act of 1996 (HIPPA).'),
    ('ack_fda_notice', '*I am aware that tattoo inks, dyes, and pigments used on the procedure site have not been approved by the federal Food and Drug Administration, and that the health consequences of using these products are unknown.'),
    ('ack_infection_signs', 'I am aware of the signs and symptoms of infection, including, but not limited to redness, swelling, tenderness of the procedure site, red streaks going from the procedure site towards the heart, elevated body temperature, or purulent drainage from the procedure site.'),
    ('ack_infection_risk', 'I understand there is a possibility of getting an infection as a result of receiving body art particularly in the event that I do not take proper care of the procedure site.'),
    ('ack_seek_medical', 'I will seek professional medical attention if signs and symptoms of an infection occur.'),
    ('ack_aftercare_negligence', 'I agree to follow all instructions concerning the care of my tattoo, and that any touch-ups needed due to my own negligence will be done at my own expense.'),
    ('ack_lightheaded', 'I understand that there is a chance I might feel lightheaded, dizzy during or after being tattooed.'),
    ('ack_notify_artist', 'I agree to immediately notify the artist in the event I feel lightheaded, dizzy and/or faint before, during or after the procedure.'),
    ('ack_risks_assumed', 'I have been fully informed of the risks of body art including but not limited to infection, scarring, difficulties in detecting melanoma, and allergic reactions to tattoo pigment, latex gloves, and antibiotics. Having been informed of the potential risks associated with a body art procedure, I still wish to proceed with the body art application and I assume any and all risks that may arise from body art.'),
]

# Record columns, split by type. Anything else in a payload is dropped.
TEXT_COLUMNS = [
    'waiver_id',
    'client_name', 'email', 'phone', 'address', 'dob',
    'emergency_contact', 'emergency_phone',
    'id_type',
    'practitioner', 'procedure_type', 'procedure_site', 'procedure_desc',
    'medical_notes',
    'signature_path', 'id_photo_front_path',
    'user_agent', 'timestamp_iso',
]

BOOLEAN_COLUMNS = (
    [f"mh_{key}" for key, _ in MEDICAL_CONDITIONS]
    + [key for key, _ in CONSENT_ITEMS]
    + ['opt_photo', 'opt_email', 'send_aftercare']
)

WAIVER_COLUMNS = TEXT_COLUMNS + BOOLEAN_COLUMNS


class Waiver(db.Model):
    """Local mirror of the Supabase `waivers` table (SQL fallback store)."""
    __tablename__ = 'waivers'

    id = db.Column(db.Integer, primary_key=True)
    # No unique constraint: a resubmitted waiver_id inserts a second row.
    waiver_id = db.Column(db.String(64), nullable=False, index=True)

    # Client
    client_name = db.Column(db.String(200), nullable=False)
    email = db.Column(db.String(255), nullable=False)
    phone = db.Column(db.String(50), nullable=True)
    address = db.Column(db.String(500), nullable=True)
    dob = db.Column(db.String(20), nullable=True) # ISO date as typed
    emergency_contact = db.Column(db.String(200), nullable=True)
    emergency_phone = db.Column(db.String(50), nullable=True)

    # Identification
    id_type = db.Column(db.String(50), nullable=True)
    id_photo_front_path = db.Column(db.String(300), nullable=True)

    # Procedure
    practitioner = db.Column(db.String(100), nullable=True)
    procedure_type = db.Column(db.String(50), nullable=True)
    procedure_site = db.Column(db.String(200), nullable=True)
    procedure_desc = db.Column(db.Text, nullable=True)

    # Medical
    mh_tb = db.Column(db.Boolean, nullable=True)
    mh_asthma = db.Column(db.Boolean, nullable=True)
    mh_eczema_psoriasis = db.Column(db.Boolean, nullable=True)
    mh_gonorrhea = db.Column(db.Boolean, nullable=True)
    mh_hiv = db.Column(db.Boolean, nullable=True)
    mh_hepatitis = db.Column(db.Boolean, nullable=True)
    mh_heart_conditions = db.Column(db.Boolean, nullable=True)
    mh_syphilis = db.Column(db.Boolean, nullable=True)
    mh_herpes = db.Column(db.Boolean, nullable=True)
    mh_skin_conditions = db.Column(db.Boolean, nullable=True)
    mh_pregnant_nursing = db.Column(db.Boolean, nullable=True)
    mh_mrsa_staph = db.Column(db.Boolean, nullable=True)
    mh_diabetes = db.Column(db.Boolean, nullable=True)
    mh_blood_thinners = db.Column(db.Boolean, nullable=True)
    mh_fainting_dizziness = db.Column(db.Boolean, nullable=True)
    mh_latex_allergies = db.Column(db.Boolean, nullable=True)
    mh_epilepsy = db.Column(db.Boolean, nullable=True)
    mh_hemophilia = db.Column(db.Boolean, nullable=True)
    mh_scarring_keloiding = db.Column(db.Boolean, nullable=True)
    mh_antibiotic_allergies = db.Column(db.Boolean, nullable=True)
    medical_notes = db.Column(db.Text, nullable=True)

    # Consents
    ack_age = db.Column(db.Boolean, nullable=True)
    ack_underage_ok = db.Column(db.Boolean, nullable=True)
    ack_sober = db.Column(db.Boolean, nullable=True)
    ack_truthful = db.Column(db.Boolean, nullable=True)
    ack_permanent = db.Column(db.Boolean, nullable=True)
    ack_placement = db.Column(db.Boolean, nullable=True)
    ack_qs_answered = db.Column(db.Boolean, nullable=True)
    ack_restrictions = db.Column(db.Boolean, nullable=True)
    ack_hippa = db.Column(db.Boolean, nullable=True)
    ack_fda_notice = db.Column(db.Boolean, nullable=True)
    ack_infection_signs = db.Column(db.Boolean, nullable=True)
    ack_infection_risk = db.Column(db.Boolean, nullable=True)
    ack_seek_medical = db.Column(db.Boolean, nullable=True)
    ack_aftercare_negligence = db.Column(db.Boolean, nullable=True)
    ack_lightheaded = db.Column(db.Boolean, nullable=True)
    ack_notify_artist = db.Column(db.Boolean, nullable=True)
    ack_risks_assumed = db.Column(db.Boolean, nullable=True)

    # Optional consents / follow-up
    opt_photo = db.Column(db.Boolean, default=False)
    opt_email = db.Column(db.Boolean, default=False)
    send_aftercare = db.Column(db.Boolean, default=False)

    # Signature + meta
    signature_path = db.Column(db.String(300), nullable=True)
    user_agent = db.Column(db.String(500), nullable=True)
    timestamp_iso = db.Column(db.String(40), nullable=True) # client clock
    created_at = db.Column(db.DateTime(timezone=True), default=get_now_utc) # server clock

    def to_dict(self):
        data = {col: getattr(self, col) for col in WAIVER_COLUMNS}
        data['id'] = self.id
        data['created_at'] = self.created_at.isoformat() if self.created_at else None
        return data
